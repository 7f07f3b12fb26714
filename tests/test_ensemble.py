"""Tests for ensembles: composite ports, expandable terminations,
plasticity broadcast and cloning."""

import numpy as np
import pytest

from ensim.errors import CloneError, StructuralError
from ensim.functions import ConstantFunction
from ensim.model import (
    Ensemble, EnsembleOrigin, EnsembleTermination, FunctionInput, RealOutput,
    SimulationMode, SpikeOutput, SpikingNeuron, SpikingNeuronFactory,
)
from ensim.plasticity import HebbianRule


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def neurons():
    return [SpikingNeuron("a"), SpikingNeuron("b")]


@pytest.fixture
def ensemble(neurons):
    return Ensemble("ens", neurons)


@pytest.fixture
def events(ensemble):
    received = []
    ensemble.add_change_listener(received.append)
    return received


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_common_origins_are_composites(self, ensemble):
        axon = ensemble.get_origin("AXON")
        assert isinstance(axon, EnsembleOrigin)
        assert axon.dimension == 2
        assert axon.node is ensemble

    def test_preexisting_terminations_exposed(self):
        nodes = [SpikingNeuron("a"), SpikingNeuron("b")]
        for node in nodes:
            node.add_termination("pre", [[1.0, 0.5]], 0.01)
        ens = Ensemble("ens", nodes)
        pre = ens.get_termination("pre")
        assert isinstance(pre, EnsembleTermination)
        assert pre.dimension == 2
        assert pre.weights.shape == (2, 2)

    def test_names_not_shared_by_all_are_hidden(self):
        a, b = SpikingNeuron("a"), SpikingNeuron("b")
        a.add_termination("only_a", [[1.0]], 0.01)
        ens = Ensemble("ens", [a, b])
        assert ens.terminations == []

    def test_mismatched_preexisting_dimensions_raise(self):
        a, b = SpikingNeuron("a"), SpikingNeuron("b")
        a.add_termination("pre", [[1.0]], 0.01)
        b.add_termination("pre", [[1.0, 2.0]], 0.01)
        with pytest.raises(StructuralError):
            Ensemble("ens", [a, b])

    def test_from_factory_names_nodes(self):
        ens = Ensemble.from_factory("ens", SpikingNeuronFactory(), 3)
        assert len(ens) == 3
        assert [n.name for n in ens.nodes] == ["node 0", "node 1", "node 2"]

    def test_non_expandable_nodes_are_skipped(self, neurons):
        source = FunctionInput("src", [ConstantFunction(1, 1.0)])
        ens = Ensemble("mixed", neurons + [source])
        assert ens.n_expandable == 2
        assert source not in ens.expandable_nodes


# ---------------------------------------------------------------------------
# Expandable terminations
# ---------------------------------------------------------------------------

class TestAddTermination:
    def test_adds_one_row_per_node(self, ensemble, neurons):
        term = ensemble.add_termination("T", [[1.0, 0.0], [0.0, 2.0]], 0.005)
        assert term.dimension == 2
        assert len(term) == 2
        np.testing.assert_array_equal(neurons[0].get_termination("T").weights,
                                      [[1.0, 0.0]])
        np.testing.assert_array_equal(neurons[1].get_termination("T").weights,
                                      [[0.0, 2.0]])
        assert ensemble.get_termination("T") is term
        assert ensemble.expanded_termination_names == ["T"]

    def test_wrong_number_of_rows(self, ensemble, neurons):
        with pytest.raises(StructuralError):
            ensemble.add_termination("T", [[1.0]], 0.005)
        assert ensemble.terminations == []
        assert not any(n.has_termination("T") for n in neurons)

    def test_unequal_row_lengths(self, ensemble, neurons):
        with pytest.raises(StructuralError):
            ensemble.add_termination("T", [[1.0], [1.0, 2.0]], 0.005)
        assert ensemble.terminations == []
        assert not any(n.has_termination("T") for n in neurons)

    def test_duplicate_name(self, ensemble):
        ensemble.add_termination("T", [[1.0], [1.0]], 0.005)
        with pytest.raises(StructuralError):
            ensemble.add_termination("T", [[2.0], [2.0]], 0.005)
        np.testing.assert_array_equal(ensemble.get_termination("T").weights,
                                      [[1.0], [1.0]])

    def test_nonpositive_tau(self, ensemble, neurons):
        with pytest.raises(StructuralError):
            ensemble.add_termination("T", [[1.0], [1.0]], 0.0)
        assert not any(n.has_termination("T") for n in neurons)

    def test_name_taken_on_a_node(self, ensemble, neurons):
        neurons[1].add_termination("T", [[1.0]], 0.005)
        with pytest.raises(StructuralError):
            ensemble.add_termination("T", [[1.0], [1.0]], 0.005)
        assert not neurons[0].has_termination("T")

    def test_no_expandable_nodes(self):
        ens = Ensemble("inputs", [FunctionInput("x", [ConstantFunction(1, 0.0)])])
        with pytest.raises(StructuralError):
            ens.add_termination("T", [], 0.005)

    def test_listeners_notified_once(self, ensemble, events):
        ensemble.add_termination("T", [[1.0], [1.0]], 0.005)
        assert len(events) == 1
        assert events[0].obj is ensemble

    def test_input_fans_out(self, ensemble, neurons):
        term = ensemble.add_termination("T", [[1.0], [1.0]], 0.005)
        term.set_values(RealOutput([0.5]))
        for node in neurons:
            np.testing.assert_array_equal(node.get_termination("T").input_vector(), [0.5])

    def test_tau_broadcasts(self, ensemble, neurons):
        term = ensemble.add_termination("T", [[1.0], [1.0]], 0.005)
        term.tau = 0.02
        assert all(n.get_termination("T").tau == 0.02 for n in neurons)


class TestRemoveTermination:
    def test_removes_from_nodes(self, ensemble, neurons, events):
        ensemble.add_termination("T", [[1.0], [1.0]], 0.005)
        ensemble.remove_termination("T")
        assert ensemble.terminations == []
        assert not any(n.has_termination("T") for n in neurons)
        assert len(events) == 2

    def test_preexisting_cannot_be_removed(self):
        nodes = [SpikingNeuron("a"), SpikingNeuron("b")]
        for node in nodes:
            node.add_termination("pre", [[1.0]], 0.01)
        ens = Ensemble("ens", nodes)
        with pytest.raises(StructuralError):
            ens.remove_termination("pre")
        assert ens.get_termination("pre") is not None
        assert all(n.has_termination("pre") for n in nodes)

    def test_unknown(self, ensemble, events):
        with pytest.raises(StructuralError):
            ensemble.remove_termination("nothing")
        assert events == []


# ---------------------------------------------------------------------------
# Running
# ---------------------------------------------------------------------------

class TestRunning:
    def test_spike_output_concatenated(self):
        nodes = [SpikingNeuron("a", bias=5.0), SpikingNeuron("b", bias=0.0)]
        ens = Ensemble("ens", nodes)
        for i in range(20):
            ens.run(i * 0.001, (i + 1) * 0.001)
        out = ens.get_origin("AXON").values
        assert isinstance(out, SpikeOutput)
        assert out.dimension == 2
        assert ens.time == pytest.approx(0.02)

    def test_mode_broadcasts(self, ensemble, neurons):
        ensemble.set_mode(SimulationMode.RATE)
        assert ensemble.mode == SimulationMode.RATE
        assert all(n.mode == SimulationMode.RATE for n in neurons)

    def test_reset_resets_nodes(self, neurons):
        neurons[0].bias = 0.5
        ens = Ensemble("ens", neurons)
        ens.run(0.0, 0.01)
        assert neurons[0].generator.voltage > 0.0
        ens.reset()
        assert neurons[0].generator.voltage == 0.0
        assert ens.time == 0.0


# ---------------------------------------------------------------------------
# Plasticity
# ---------------------------------------------------------------------------

class TestPlasticity:
    def test_rule_set_on_plastic_nodes(self, neurons):
        source = FunctionInput("src", [ConstantFunction(1, 1.0)])
        ens = Ensemble("ens", neurons + [source])
        rule = HebbianRule()
        ens.set_plasticity_rule("T", rule)
        assert ens.get_plasticity_rule("T") is rule
        assert ens.plasticity_rule_names == ["T"]
        assert all(n.get_plasticity_rule("T") is rule for n in neurons)

    def test_interval_is_minimum_over_plastic_nodes(self, neurons):
        neurons[0].plasticity_interval = 0.5
        neurons[1].plasticity_interval = 0.2
        source = FunctionInput("src", [ConstantFunction(1, 1.0)])
        ens = Ensemble("ens", neurons + [source])
        assert ens.plasticity_interval == pytest.approx(0.2)

    def test_interval_without_plastic_nodes(self):
        ens = Ensemble("inputs", [FunctionInput("x", [ConstantFunction(1, 0.0)])])
        assert ens.plasticity_interval == -1

    def test_interval_setter_broadcasts(self, ensemble, neurons):
        ensemble.plasticity_interval = 0.1
        assert all(n.plasticity_interval == pytest.approx(0.1) for n in neurons)


# ---------------------------------------------------------------------------
# Cloning
# ---------------------------------------------------------------------------

class TestClone:
    def test_round_trip(self, ensemble):
        ensemble.add_termination("T", [[1.0], [2.0]], 0.005)
        twin = ensemble.clone()

        term = twin.get_termination("T")
        assert term.name == "T"
        assert term.dimension == 1
        np.testing.assert_array_equal(term.weights, [[1.0], [2.0]])
        assert term.node is twin

    def test_composites_point_at_cloned_nodes(self, ensemble):
        ensemble.add_termination("T", [[1.0], [2.0]], 0.005)
        twin = ensemble.clone()
        for node, component in zip(twin.nodes, twin.get_termination("T").terminations):
            assert component is node.get_termination("T")
        for origin, node in zip(twin.get_origin("AXON").origins, twin.nodes):
            assert origin.node is node

    def test_weights_are_independent(self, ensemble, neurons):
        ensemble.add_termination("T", [[1.0], [2.0]], 0.005)
        twin = ensemble.clone()
        twin.nodes[0].get_termination("T").weights[0, 0] = 5.0
        assert neurons[0].get_termination("T").weights[0, 0] == 1.0

    def test_expanded_termination_still_removable(self, ensemble):
        ensemble.add_termination("T", [[1.0], [2.0]], 0.005)
        twin = ensemble.clone()
        twin.remove_termination("T")
        assert twin.terminations == []
        assert ensemble.get_termination("T") is not None

    def test_rules_are_copied(self, ensemble):
        rule = HebbianRule(learning_rate=0.5)
        ensemble.set_plasticity_rule("T", rule)
        twin = ensemble.clone()
        copied = twin.get_plasticity_rule("T")
        assert copied is not rule
        assert copied.learning_rate == 0.5
        assert all(n.get_plasticity_rule("T") is copied for n in twin.nodes)

    def test_listeners_not_copied(self, ensemble, events):
        twin = ensemble.clone()
        assert twin.change_listeners == ()
        twin.add_termination("T", [[1.0], [2.0]], 0.005)
        assert events == []

    def test_inconsistent_copy_raises_clone_error(self, ensemble, neurons):
        ensemble.add_termination("T", [[1.0], [2.0]], 0.005)
        neurons[0].clone = lambda: SpikingNeuron("bare")
        with pytest.raises(CloneError):
            ensemble.clone()


def test_summary_mentions_terminations(ensemble):
    ensemble.add_termination("T", [[1.0], [2.0]], 0.005)
    text = ensemble.summary()
    assert "ens" in text
    assert "'T'" in text
