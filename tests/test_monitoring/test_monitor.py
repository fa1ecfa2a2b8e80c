"""Tests for the dual-automaton monitor."""

from __future__ import annotations

import logging
import threading
import time

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ontomon.automata import AutomatonBuilder, CompiledEdge, StaticCompiler, Symbol
from ontomon.logic import ClashOracle
from ontomon.monitoring import Monitor, MonitorState, Verdict, successor_states
from ontomon.types import SIGMA, MonitorInvariantError

OBSERVATION_KINDS = ["nothing", "p", "not_p"]


def observation(kind: str, a_x, not_a_x) -> set:
    return {"nothing": set(), "p": {a_x}, "not_p": {not_a_x}}[kind]


class RecordingOracle(ClashOracle):
    """Clash oracle that records every single-set query."""

    def __init__(self):
        self.queries: list[frozenset] = []

    def is_satisfiable(self, axioms):
        axioms = frozenset(axioms)
        self.queries.append(axioms)
        return super().is_satisfiable(axioms)


class OutageOracle(ClashOracle):
    """Fails whenever the marker meets the given axiom."""

    def __init__(self, marker, trigger):
        self.marker = marker
        self.trigger = trigger

    def is_satisfiable(self, axioms):
        axioms = frozenset(axioms)
        if self.marker in axioms and self.trigger in axioms:
            raise RuntimeError("oracle outage")
        return super().is_satisfiable(axioms)


class PeakOracle(ClashOracle):
    """Clash oracle that records the most calls in flight at once."""

    def __init__(self):
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def is_satisfiable(self, axioms):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            time.sleep(0.005)
            return super().is_satisfiable(axioms)
        finally:
            with self._lock:
                self.active -= 1


def delayed_compiler() -> StaticCompiler:
    """Formula side a0 -Σ-> a1 -Σ-> a2 (final, Σ loop); negation n0 -!p-> n1 (final, Σ loop)."""
    return StaticCompiler(
        {
            "delayed": [
                CompiledEdge("a0", "a1", {SIGMA}, source_initial=True),
                CompiledEdge("a1", "a2", {SIGMA}, target_final=True),
                CompiledEdge("a2", "a2", {SIGMA}, source_final=True, target_final=True),
            ],
            "!(delayed)": [
                CompiledEdge("n0", "n1", {"!p"}, source_initial=True, target_final=True),
                CompiledEdge("n1", "n1", {SIGMA}, source_final=True, target_final=True),
            ],
        }
    )


def wide_compiler(width: int) -> StaticCompiler:
    """Both sides fan out from init into width accepting sinks."""

    def fan(label: str) -> list[CompiledEdge]:
        edges = []
        for i in range(width):
            edges.append(CompiledEdge("init", f"t{i}", {label}, source_initial=True, target_final=True))
            edges.append(CompiledEdge(f"t{i}", f"t{i}", {SIGMA}, source_final=True, target_final=True))
        return edges

    return StaticCompiler({"wide": fan("p"), "!(wide)": fan("!p")})


# ---------------------------------------------------------------------------
# Verdicts and state
# ---------------------------------------------------------------------------


class TestVerdict:
    """Tests for the Verdict enum."""

    def test_conclusive(self):
        assert Verdict.TRUE.is_conclusive()
        assert Verdict.FALSE.is_conclusive()
        assert not Verdict.UNDECIDED.is_conclusive()

    def test_negate(self):
        assert Verdict.TRUE.negate() is Verdict.FALSE
        assert Verdict.FALSE.negate() is Verdict.TRUE
        assert Verdict.UNDECIDED.negate() is Verdict.UNDECIDED

    def test_str_and_value(self):
        assert str(Verdict.UNDECIDED) == "UNDECIDED"
        assert Verdict("true") is Verdict.TRUE


class TestMonitorState:
    """Tests for deriving verdicts from live state-sets."""

    @pytest.mark.parametrize(
        "formula_states,negation_states,expected",
        [
            ({"a"}, {"b"}, Verdict.UNDECIDED),
            (set(), {"b"}, Verdict.FALSE),
            ({"a"}, set(), Verdict.TRUE),
        ],
    )
    def test_verdict(self, formula_states, negation_states, expected):
        state = MonitorState(frozenset(formula_states), frozenset(negation_states))
        assert state.verdict() is expected

    def test_both_empty(self):
        with pytest.raises(MonitorInvariantError):
            MonitorState(frozenset(), frozenset()).verdict()

    def test_as_pair(self):
        state = MonitorState(frozenset({"a"}), frozenset({"b"}))
        assert state.as_pair() == (frozenset({"a"}), frozenset({"b"}))


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestMonitorConstruction:
    """Tests for building the two automata."""

    def test_initial_state(self, builder, make_formula):
        monitor = Monitor(make_formula("p"), builder)
        assert monitor.current_state_pair() == (frozenset({"init"}), frozenset({"init"}))
        assert monitor.verdict() is Verdict.UNDECIDED
        assert monitor.steps == 0

    def test_formulas_and_automata(self, builder, make_formula):
        monitor = Monitor(make_formula("<>p"), builder)
        positive, negative = monitor.formulas
        assert positive.propositional_abstraction == "<>p"
        assert negative.propositional_abstraction == "!(<>p)"

        automaton, negation_automaton = monitor.automata
        assert automaton.states == frozenset({"s0", "s1"})
        assert negation_automaton.states == frozenset({"s0"})

    def test_global_context_can_decide_immediately(self, builder, make_formula, not_a_x):
        monitor = Monitor(make_formula("p"), builder, global_context=[not_a_x])
        assert monitor.verdict() is Verdict.FALSE

    def test_constraints_are_conjoined_to_both_sides(self, builder, make_formula):
        monitor = Monitor(make_formula("<>p"), builder, constraints=make_formula("[]p"))
        positive, negative = monitor.formulas
        assert positive.propositional_abstraction == "(<>p) && ([]p)"
        assert negative.propositional_abstraction == "(!(<>p)) && ([]p)"
        # under []p, <>p holds on every trace
        assert monitor.verdict() is Verdict.TRUE

    def test_both_automata_empty(self, oracle, make_formula):
        builder = AutomatonBuilder(StaticCompiler({"p": [], "!(p)": []}), oracle)
        with pytest.raises(MonitorInvariantError) as exc_info:
            Monitor(make_formula("p"), builder)
        assert exc_info.value.steps == 0

    def test_parallel_construction(self, compiler, oracle, make_formula):
        sequential = Monitor(make_formula("[]p"), AutomatonBuilder(compiler, oracle))
        with AutomatonBuilder(compiler, oracle, max_workers=4) as builder:
            parallel = Monitor(make_formula("[]p"), builder)
        assert parallel.automata == sequential.automata
        assert parallel.current_state_pair() == sequential.current_state_pair()

    @pytest.mark.parametrize("max_workers", [1, 2, 3])
    def test_oracle_calls_bounded_by_max_workers(self, make_formula, max_workers):
        oracle = PeakOracle()
        with AutomatonBuilder(wide_compiler(8), oracle, max_workers=max_workers) as builder:
            monitor = Monitor(make_formula("wide"), builder)
            assert monitor.run([set(), set()]) is Verdict.UNDECIDED
        assert 1 <= oracle.peak <= max_workers

    def test_repr(self, builder, make_formula):
        monitor = Monitor(make_formula("p"), builder)
        assert repr(monitor) == "Monitor('p', steps=0, verdict=UNDECIDED)"


# ---------------------------------------------------------------------------
# Stepping
# ---------------------------------------------------------------------------


class TestMonitorStep:
    """Tests for reading observations."""

    def test_now_p_satisfied(self, builder, make_formula, a_x):
        monitor = Monitor(make_formula("p"), builder)
        assert monitor.step({a_x}) is Verdict.TRUE
        assert monitor.current_state_pair() == (frozenset({"acc"}), frozenset())

    def test_now_p_violated(self, builder, make_formula, not_a_x):
        monitor = Monitor(make_formula("p"), builder)
        assert monitor.step({not_a_x}) is Verdict.FALSE

    def test_now_p_without_information(self, builder, make_formula):
        monitor = Monitor(make_formula("p"), builder)
        assert monitor.step(set()) is Verdict.UNDECIDED
        assert monitor.current_state_pair() == (frozenset({"acc"}), frozenset({"acc"}))
        # the wildcard loops keep both sides alive forever
        assert monitor.step(set()) is Verdict.UNDECIDED

    def test_always_p(self, builder, make_formula, a_x, not_a_x):
        monitor = Monitor(make_formula("[]p"), builder)
        assert monitor.step({a_x}) is Verdict.UNDECIDED
        assert monitor.step({a_x}) is Verdict.UNDECIDED
        assert monitor.step({not_a_x}) is Verdict.FALSE
        assert monitor.steps == 3

    def test_eventually_p(self, builder, make_formula, a_x, not_a_x):
        monitor = Monitor(make_formula("<>p"), builder)
        assert monitor.step({not_a_x}) is Verdict.UNDECIDED
        assert monitor.step({a_x}) is Verdict.TRUE

    def test_global_context_joins_each_observation(self, compiler, make_formula, a_x):
        oracle = RecordingOracle()
        monitor = Monitor(make_formula("p"), AutomatonBuilder(compiler, oracle), ["ctx"])
        oracle.queries.clear()

        assert monitor.step({a_x}) is Verdict.TRUE
        assert oracle.queries
        assert all("ctx" in query and a_x in query for query in oracle.queries)

    def test_global_context_decides_at_construction(self, builder, make_formula, a_x):
        # with A(x) everywhere, !p can never be read
        monitor = Monitor(make_formula("[]p"), builder, global_context=[a_x])
        assert monitor.verdict() is Verdict.TRUE
        assert monitor.step(set()) is Verdict.TRUE

    def test_observation_may_be_any_iterable(self, builder, make_formula, a_x):
        monitor = Monitor(make_formula("p"), builder)
        assert monitor.step(iter([a_x])) is Verdict.TRUE

    def test_inconsistent_observation_raises_and_keeps_state(
        self, builder, make_formula, a_x, not_a_x
    ):
        monitor = Monitor(make_formula("p"), builder)
        before = monitor.state

        with pytest.raises(MonitorInvariantError) as exc_info:
            monitor.step({a_x, not_a_x})

        assert exc_info.value.steps == 1
        assert monitor.state == before
        assert monitor.steps == 0

    def test_oracle_failure_keeps_state(self, compiler, make_formula, a_x, not_a_x):
        oracle = OutageOracle(marker="outage", trigger=not_a_x)
        monitor = Monitor(make_formula("<>p"), AutomatonBuilder(compiler, oracle))
        before = monitor.state

        # the positive side is stepped fine, the negative side fails
        with pytest.raises(RuntimeError, match="oracle outage"):
            monitor.step({"outage"})

        assert monitor.state == before
        assert monitor.steps == 0
        assert monitor.step({a_x}) is Verdict.TRUE

    def test_conclusive_verdict_is_sticky(self, builder, make_formula, a_x, not_a_x, caplog):
        monitor = Monitor(make_formula("p"), builder)
        assert monitor.step({a_x}) is Verdict.TRUE

        with caplog.at_level(logging.WARNING, logger="ontomon.monitoring.monitor"):
            assert monitor.step({not_a_x}) is Verdict.TRUE
            assert monitor.step(set()) is Verdict.TRUE

        assert monitor.current_state_pair() == (frozenset({"acc"}), frozenset())
        assert monitor.steps == 3
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_surviving_side_keeps_moving_after_verdict(self, oracle, make_formula, a_x):
        monitor = Monitor(make_formula("delayed"), AutomatonBuilder(delayed_compiler(), oracle))

        assert monitor.step({a_x}) is Verdict.TRUE
        assert monitor.current_state_pair() == (frozenset({"a1"}), frozenset())
        assert monitor.step(set()) is Verdict.TRUE
        assert monitor.current_state_pair() == (frozenset({"a2"}), frozenset())
        assert monitor.step(set()) is Verdict.TRUE
        assert monitor.current_state_pair() == (frozenset({"a2"}), frozenset())

    def test_inconsistent_observation_after_verdict_raises(
        self, oracle, make_formula, a_x, not_a_x
    ):
        monitor = Monitor(make_formula("delayed"), AutomatonBuilder(delayed_compiler(), oracle))
        monitor.step({a_x})
        assert monitor.step(set()) is Verdict.TRUE
        before = monitor.state

        with pytest.raises(MonitorInvariantError) as exc_info:
            monitor.step({a_x, not_a_x})

        assert exc_info.value.steps == 3
        assert monitor.state == before
        assert monitor.steps == 2

    def test_run_stops_early(self, builder, make_formula, a_x, not_a_x):
        monitor = Monitor(make_formula("<>p"), builder)
        verdict = monitor.run([set(), {a_x}, {not_a_x}, {a_x}])
        assert verdict is Verdict.TRUE
        assert monitor.steps == 2

    def test_run_without_observations(self, builder, make_formula):
        monitor = Monitor(make_formula("<>p"), builder)
        assert monitor.run([]) is Verdict.UNDECIDED


class TestRigidNames:
    """Rigid names carry information across time points."""

    def test_flexible_name_stays_undecided(self, builder, make_formula, not_a_x):
        monitor = Monitor(make_formula("p"), builder)
        assert monitor.run([set(), {not_a_x}]) is Verdict.UNDECIDED

    def test_rigid_name_is_violated_later(self, builder, make_formula, not_a_x):
        monitor = Monitor(make_formula("p", rigid_names={"A"}), builder)
        assert monitor.step(set()) is Verdict.UNDECIDED
        # A(x) at time 1 would force A(x) now
        assert monitor.step({not_a_x}) is Verdict.FALSE

    def test_rigid_name_is_satisfied_later(self, builder, make_formula, a_x):
        monitor = Monitor(make_formula("p", rigid_names={"A"}), builder)
        assert monitor.step(set()) is Verdict.UNDECIDED
        assert monitor.step({a_x}) is Verdict.TRUE


class TestSuccessorStates:
    """Tests for the one-step successor computation."""

    def test_each_symbol_checked_once(self, compiler, make_formula, a_x):
        calls: list[frozenset] = []

        def check_all(axiom_sets):
            calls.extend(axiom_sets)
            return [ClashOracle().is_satisfiable(s) for s in axiom_sets]

        formula = make_formula("<>p")
        automaton = AutomatonBuilder(compiler, ClashOracle()).build(formula).trim()
        result = successor_states(automaton, {"s0", "s1"}, frozenset({a_x}), formula, check_all)

        assert result == frozenset({"s0", "s1"})
        # {<SIGMA>} is shared by s0 and s1 but checked once
        assert len(calls) == len(automaton.symbols) == 2
        assert Symbol.of("p") in automaton.symbols

    def test_no_states(self, builder, make_formula):
        formula = make_formula("p")
        automaton = builder.build(formula)
        assert successor_states(automaton, set(), frozenset(), formula, builder.check_all) == frozenset()


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestMonitorProperties:
    """Verdict monotonicity and negation duality on random traces."""

    @given(
        text=st.sampled_from(["p", "[]p", "<>p"]),
        kinds=st.lists(st.sampled_from(OBSERVATION_KINDS), max_size=6),
    )
    @settings(max_examples=60, deadline=None)
    def test_conclusive_verdicts_never_change(self, builder, make_formula, a_x, not_a_x, text, kinds):
        monitor = Monitor(make_formula(text), builder)
        verdicts = [monitor.step(observation(kind, a_x, not_a_x)) for kind in kinds]
        for i, verdict in enumerate(verdicts):
            if verdict.is_conclusive():
                assert all(later is verdict for later in verdicts[i:])

    @given(
        text=st.sampled_from(["[]p", "<>p"]),
        kinds=st.lists(st.sampled_from(OBSERVATION_KINDS), max_size=6),
    )
    @settings(max_examples=60, deadline=None)
    def test_negated_monitor_agrees(self, builder, make_formula, a_x, not_a_x, text, kinds):
        formula = make_formula(text)
        monitor = Monitor(formula, builder)
        negated = Monitor(formula.negation(), builder)
        assert monitor.verdict() is negated.verdict().negate()
        for kind in kinds:
            obs = observation(kind, a_x, not_a_x)
            assert monitor.step(obs) is negated.step(obs).negate()
