"""Category of One (Streamlit)

UI/Experience

Principles:
- UI only renders + triggers.
- Core domain and engine are pure Python modules.
- The consultant is cosmetic. If Gemini fails we show its fallback line and keep playing.

Entry point: streamlit run app.py
"""

from __future__ import annotations

import html
import logging
import os
from dataclasses import asdict
from typing import Dict

import streamlit as st

from content.providers.base import AdvisoryProvider, ProviderStatus
from content.providers.gemini import GeminiProvider
from content.providers.offline import OfflineAdvisor
from core.effects import hunt_permitted, offer_score
from core.stages import Payout, StageSpec, get_stage_spec
from core.state import (
    ENERGY_BUDGET,
    ENERGY_FIELDS,
    SLIDER_MAX,
    SLIDER_MIN,
    VALUE_EQUATION_FIELDS,
    WIN_BRAND,
    WIN_CASH,
    LogType,
    Stage,
    Status,
    state_to_dict,
)
from engine.advisory import AdvisoryChannel
from engine.config import API_KEY_ENV_VARS, AdvisoryConfig, EngineConfig, split_api_keys
from engine.logging import format_delta, format_money
from engine.pipeline import decide, preview_delta
from engine.stage_engine import StageEngine


APP_TITLE = "CATEGORY OF ONE"
APP_SUBTITLE = "In 8 sectors, you will either become Category King or be ground down into a commodity."
APP_VERSION = "1.0.0"

logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))

st.set_page_config(page_title="Category of One", page_icon="🎯", layout="wide", initial_sidebar_state="collapsed")

CSS = """
<style>
.block-container {padding-top: 2.4rem; padding-bottom: 2rem;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 10px;
  padding: 14px 16px;
  background: rgba(255,255,255,0.03);
}
.log {font-family: monospace; font-size: 12px; line-height: 1.5;}
.log .ts {opacity: .3;}
.log .info {color: #60a5fa;}
.log .success {color: #4ade80;}
.log .error {color: #f87171;}
.log .warning {color: #facc15;}
.consultant {font-family: monospace; font-size: 14px; line-height: 1.9;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)

LOG_PREFIX: Dict[LogType, str] = {
    LogType.SUCCESS: ">>",
    LogType.ERROR: "!!",
    LogType.WARNING: "??",
    LogType.INFO: "::",
}


# =========================
# Helpers
# =========================


def _advisory_config() -> AdvisoryConfig:
    # Streamlit Cloud: st.secrets
    try:
        for name in API_KEY_ENV_VARS:
            if name in st.secrets:
                keys = split_api_keys(str(st.secrets[name]))
                if keys:
                    return AdvisoryConfig(api_keys=keys)
    except FileNotFoundError:
        pass
    # Local
    return AdvisoryConfig.from_env()


def _provider(cfg: AdvisoryConfig) -> AdvisoryProvider:
    if not cfg.has_credentials:
        return OfflineAdvisor()
    return GeminiProvider.from_config(cfg)


# =========================
# Session State
# =========================


def _ensure_state() -> None:
    ss = st.session_state
    if "engine" not in ss:
        cfg = _advisory_config()
        engine = StageEngine(EngineConfig())
        provider = _provider(cfg)
        ss.engine = engine
        ss.provider = provider
        ss.channel = AdvisoryChannel(provider, config=engine.config, max_workers=cfg.max_workers).attach(engine)
    # presentation-only flags
    if "intro_finished" not in ss:
        ss.intro_finished = False
    if "last_result" not in ss:
        ss.last_result = None


def _start() -> None:
    ss = st.session_state
    ss.engine.start_session()
    ss.intro_finished = True


def _reset() -> None:
    ss = st.session_state
    ss.engine.reset_session()
    ss.intro_finished = False
    ss.last_result = None


def _choose(option_key: str) -> None:
    ss = st.session_state
    ss.last_result = decide(ss.engine, option_key)


# =========================
# Components
# =========================


def render_stats(engine: StageEngine) -> None:
    s = engine.state
    a, b, c = st.columns(3)
    a.metric("Runway", format_money(s.cash))
    b.metric("Brand", f"{s.brand}")
    c.metric("Sector", f"{min(int(s.stage), int(Stage.CLOSE))}/{int(Stage.CLOSE)}")
    st.progress(min(1.0, int(s.stage) / float(Stage.CLOSE)))


def render_logs(engine: StageEngine) -> None:
    rows = []
    for e in engine.state.logs:
        rows.append(
            f"<div><span class='ts'>[{e.timestamp}]</span> "
            f"<span class='{e.type.value}'>{LOG_PREFIX[e.type]} {e.message}</span></div>"
        )
    with st.container(height=180):
        st.markdown(f"<div class='log'>{''.join(rows)}</div>", unsafe_allow_html=True)


@st.fragment(run_every=1.0)
def render_consultant() -> None:
    ss = st.session_state
    channel: AdvisoryChannel = ss.channel
    st.markdown("#### 🧠 The Consultant")
    if channel.thinking:
        st.markdown("<div class='consultant'>Analyzing...</div>", unsafe_allow_html=True)
        ss.consultant_waiting = True
        return
    st.markdown(f"<div class='consultant'>{html.escape(channel.message)}</div>", unsafe_allow_html=True)
    if ss.get("consultant_waiting"):
        # re-enable the choice buttons
        ss.consultant_waiting = False
        st.rerun()


def render_offer(engine: StageEngine, spec: StageSpec, locked: bool) -> None:
    eq = engine.value_eq
    labels = {"dream": "DREAM OUTCOME", "likelihood": "LIKELIHOOD", "time_delay": "TIME DELAY", "effort": "EFFORT"}
    cols = st.columns(2)
    for i, name in enumerate(VALUE_EQUATION_FIELDS):
        with cols[i % 2]:
            v = st.slider(labels[name], SLIDER_MIN, SLIDER_MAX, int(getattr(eq, name)), key=f"eq_{engine.session_id}_{name}")
            eq.set(name, v)
    st.markdown(f"### SCORE: {offer_score(eq):.1f}")
    opt = spec.options[0]
    if st.button("DEPLOY OFFER", disabled=locked, use_container_width=True):
        _choose(opt.key)
        st.rerun()


def render_hunt(engine: StageEngine, spec: StageSpec, locked: bool) -> None:
    energy = engine.energy
    cols = st.columns(2)
    for i, name in enumerate(ENERGY_FIELDS):
        with cols[i % 2]:
            v = st.number_input(name.upper(), value=int(getattr(energy, name)), step=5, key=f"en_{engine.session_id}_{name}")
            energy.set(name, int(v))
    ok = hunt_permitted(energy)
    if not ok:
        st.warning(f"Energy over budget: {energy.total}/{ENERGY_BUDGET}")
    opt = spec.options[0]
    if st.button(f"HUNT ({energy.total}/{ENERGY_BUDGET})", disabled=locked or not ok, use_container_width=True):
        _choose(opt.key)
        st.rerun()


def render_fixed(engine: StageEngine, spec: StageSpec, locked: bool) -> None:
    for opt in spec.options:
        label = f"{opt.key}: {opt.label}"
        if st.button(label, key=f"opt_{engine.session_id}_{int(spec.stage)}_{opt.key}", disabled=locked, use_container_width=True):
            _choose(opt.key)
            st.rerun()


def render_stage(engine: StageEngine) -> None:
    ss = st.session_state
    s = engine.state

    if s.stage == Stage.INTRO:
        st.markdown(f"## {APP_TITLE}")
        st.markdown(APP_SUBTITLE)
        if st.button("INITIALIZE RUNWAY →", type="primary"):
            _start()
            st.rerun()
        return

    if s.stage == Stage.AFTERMATH:
        st.markdown("## Post-game")
        st.info(
            f"You made it through all 8 sectors, but Category King needs {format_money(WIN_CASH)} "
            f"runway and {WIN_BRAND} brand at the Close."
        )
        return

    spec = get_stage_spec(s.stage)
    st.markdown(f"## {spec.title}")
    st.markdown(f"*{spec.scenario}*")

    locked = bool(ss.channel.thinking)
    if spec.options[0].payout is Payout.OFFER:
        render_offer(engine, spec, locked)
    elif spec.options[0].payout is Payout.HUNT:
        render_hunt(engine, spec, locked)
    else:
        render_fixed(engine, spec, locked)

    res = ss.get("last_result")
    if res is not None and not res.accepted:
        st.warning(f"Rejected: {res.reason}")


def render_terminal(engine: StageEngine) -> None:
    s = engine.state
    if s.status is Status.LOST:
        st.error("## BANKRUPT\nThe market shows no mercy to commodities.")
        label = "REBOOT"
    else:
        st.success("## CATEGORY KING\nYou are the only choice.")
        label = "NEW VENTURE"
    st.markdown(f"Runway {format_money(s.cash)} · Brand {s.brand}")
    if st.button(label, type="primary", use_container_width=True):
        _reset()
        st.rerun()


# =========================
# Sidebar
# =========================


def sidebar() -> None:
    ss = st.session_state
    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")
    st.sidebar.caption(f"core: {getattr(__import__('core'), 'API_VERSION', None)}")

    ps: ProviderStatus = ss.provider.status()
    if ps.backend == "offline":
        st.sidebar.warning("Consultant offline (no API key)")
    elif ps.ok:
        st.sidebar.success(f"Gemini ready ({ps.model})")
    else:
        st.sidebar.error("Gemini not ready")
        st.sidebar.caption(ps.error or "API key missing")

    if st.sidebar.button("Reset", use_container_width=True):
        _reset()
        st.rerun()

    res = ss.get("last_result")
    if res is not None and res.accepted:
        st.sidebar.caption(f"Last: {res.choice_label} · {format_delta(res.cash_delta, res.brand_delta)}")

    with st.sidebar.expander("Debug"):
        st.json(state_to_dict(ss.engine.state))
        st.json(asdict(ps))
        if ss.engine.state.stage in (Stage.OFFER, Stage.HUNT):
            spec = get_stage_spec(ss.engine.state.stage)
            st.caption(f"Preview delta: {preview_delta(ss.engine, spec.options[0].key)}")


# =========================
# Main
# =========================


def main() -> None:
    _ensure_state()
    sidebar()

    ss = st.session_state
    engine: StageEngine = ss.engine

    if engine.state.status is not Status.PLAYING:
        render_terminal(engine)
        return

    st.markdown(f"### 🎯 {APP_TITLE}")
    if ss.intro_finished:
        render_stats(engine)

    left, right = st.columns([2.0, 1.0])
    with left:
        with st.container(border=True):
            try:
                render_stage(engine)
            except ValueError as e:
                st.error(f"Stage error: {e}")
        if ss.intro_finished:
            render_logs(engine)
    with right:
        with st.container(border=True):
            render_consultant()


if __name__ == "__main__":
    main()
