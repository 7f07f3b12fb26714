"""Tests for the LIF spike generator.

Covers argument checking, the closed-form rate modes, the sub-stepped
spiking modes with spike-time interpolation, reset and cloning.
"""

import math

import numpy as np
import pytest

from ensim.config import DEFAULT_CONFIG, SimulationConfig
from ensim.errors import SimulationError
from ensim.functions.pdf import IndicatorPDF
from ensim.model.lif import (
    LIFSpikeGenerator, LIFSpikeGeneratorFactory, lif_rate, NO_SPIKE,
)
from ensim.model.mode import SimulationMode
from ensim.model.output import PreciseSpikeOutput, RealOutput, SpikeOutput
from ensim.units import Units


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def generator():
    """1 ms sub-steps, 20 ms membrane, 2 ms refractory."""
    return LIFSpikeGenerator(max_time_step=0.001, tau_rc=0.02, tau_ref=0.002)


def constant_drive(generator, current, span=0.02, start=0.0):
    return generator.run([start, start + span], [current, current])


# ---------------------------------------------------------------------------
# Argument contract
# ---------------------------------------------------------------------------

class TestArguments:
    def test_mismatched_lengths_raise(self, generator):
        with pytest.raises(ValueError):
            generator.run([0.0, 0.001, 0.002], [1.0, 1.0])

    def test_single_time_raises(self, generator):
        with pytest.raises(ValueError):
            generator.run([0.0], [1.0])

    def test_non_increasing_times_raise(self, generator):
        with pytest.raises(ValueError):
            generator.run([0.0, 0.0], [1.0, 1.0])


# ---------------------------------------------------------------------------
# Rate modes
# ---------------------------------------------------------------------------

class TestConstantRate:
    @pytest.mark.parametrize("current,tau_rc,tau_ref", [
        (1.5, 0.02, 0.002),
        (2.0, 0.02, 0.002),
        (10.0, 0.05, 0.001),
        (1.01, 0.01, 0.005),
    ])
    def test_matches_closed_form(self, current, tau_rc, tau_ref):
        g = LIFSpikeGenerator(0.001, tau_rc, tau_ref)
        g.set_mode(SimulationMode.CONSTANT_RATE)
        out = g.run([0.0, 0.001], [current, current])
        expected = 1.0 / (tau_ref - tau_rc * math.log(1.0 - 1.0 / current))
        assert isinstance(out, RealOutput)
        assert out.units == Units.SPIKES_PER_S
        assert out.values[0] == pytest.approx(expected)

    @pytest.mark.parametrize("current", [-1.0, 0.0, 0.5, 1.0])
    def test_subthreshold_is_silent(self, generator, current):
        generator.set_mode(SimulationMode.RATE)
        out = generator.run([0.0, 0.001], [current, current])
        assert out.values[0] == 0.0

    def test_uses_current_at_end_of_interval(self, generator):
        generator.set_mode(SimulationMode.RATE)
        out = generator.run([0.0, 0.001], [0.0, 2.0])
        assert out.values[0] == pytest.approx(lif_rate(2.0, 0.02, 0.002))

    def test_no_history_after_rate_run(self, generator):
        constant_drive(generator, 2.0)
        assert len(generator.get_history("V")) > 0
        generator.set_mode(SimulationMode.CONSTANT_RATE)
        constant_drive(generator, 2.0)
        assert len(generator.get_history("V")) == 0


# ---------------------------------------------------------------------------
# Spiking modes
# ---------------------------------------------------------------------------

class TestSpiking:
    def test_no_input_no_spike(self, generator):
        out = constant_drive(generator, 0.0)
        assert isinstance(out, SpikeOutput)
        assert not out.values[0]
        assert generator.voltage == 0.0

    def test_subthreshold_input_never_spikes(self, generator):
        for i in range(50):
            out = constant_drive(generator, 0.9, start=i * 0.02)
            assert not out.values[0]
        assert generator.voltage < 1.0

    def test_strong_input_spikes(self, generator):
        out = constant_drive(generator, 2.0)
        assert out.values[0]
        assert out.time == pytest.approx(0.02)

    def test_voltage_never_negative(self, generator):
        rng = np.random.default_rng(7)
        for i in range(200):
            t0 = i * 0.002
            currents = rng.uniform(-5.0, 5.0, size=3)
            generator.run([t0, t0 + 0.0007, t0 + 0.002], currents)
            assert generator.voltage >= 0.0
            assert np.all(generator.get_history("V").values >= 0.0)

    def test_voltage_zero_after_spike(self, generator):
        """Run one sub-step at a time; a spiking step always ends at V = 0."""
        n_spikes = 0
        for i in range(100):
            out = generator.run([i * 0.001, (i + 1) * 0.001], [3.0, 3.0])
            if out.values[0]:
                n_spikes += 1
                assert generator.voltage == 0.0
        assert n_spikes > 1

    def test_zero_order_hold(self, generator):
        """Current switched on at the last sample has no effect on the run."""
        out = generator.run([0.0, 0.01, 0.02], [0.0, 0.0, 50.0])
        assert not out.values[0]
        assert np.all(generator.get_history("V").values == 0.0)


class TestPrecise:
    def test_spike_offset_lies_in_crossing_substep(self, generator):
        generator.set_mode(SimulationMode.PRECISE)
        out = constant_drive(generator, 2.0, span=0.02)
        assert isinstance(out, PreciseSpikeOutput)

        history = generator.get_history("V")
        dt = history.times[1] - history.times[0]
        crossed = np.where(history.values[:, 0] >= 1.0)[0]
        assert len(crossed) == 1
        i = crossed[0]
        assert i * dt <= out.values[0] < (i + 1) * dt

    def test_no_spike_sentinel(self, generator):
        generator.set_mode(SimulationMode.PRECISE)
        out = constant_drive(generator, 0.5)
        assert out.values[0] == NO_SPIKE
        assert not out.spiked[0]

    def test_only_last_spike_reported(self, generator):
        generator.set_mode(SimulationMode.PRECISE)
        out = constant_drive(generator, 5.0, span=0.05)
        history = generator.get_history("V")
        dt = history.times[1] - history.times[0]
        crossed = np.where(history.values[:, 0] >= 1.0)[0]
        assert len(crossed) > 1
        last = crossed[-1]
        assert last * dt <= out.values[0] < (last + 1) * dt

    def test_interpolation_is_linear(self):
        """A single sub-step from V=0 with I such that V ends at exactly 2."""
        g = LIFSpikeGenerator(max_time_step=0.001, tau_rc=0.001, tau_ref=0.0)
        g.set_mode(SimulationMode.PRECISE)
        out = g.run([0.0, 0.001], [2.0, 2.0])
        # V goes 0 -> 2 over the sub-step, so threshold is crossed halfway
        assert out.values[0] == pytest.approx(0.0005)
        assert g.voltage == 0.0

    def test_exact_threshold_landing_stays_in_substep(self):
        """V reaches exactly 1 at the end of the only sub-step."""
        g = LIFSpikeGenerator(max_time_step=0.001, tau_rc=0.001, tau_ref=0.0)
        g.set_mode(SimulationMode.PRECISE)
        out = g.run([0.0, 0.001], [1.0, 1.0])
        dt = 0.001
        assert out.spiked[0]
        assert 0.0 <= out.values[0] < dt
        assert out.values[0] == pytest.approx(dt)

    def test_default_and_precise_agree(self):
        a = LIFSpikeGenerator(0.001, 0.02, 0.002)
        b = LIFSpikeGenerator(0.001, 0.02, 0.002)
        b.set_mode(SimulationMode.PRECISE)
        for i in range(30):
            span = [i * 0.005, (i + 1) * 0.005]
            spiked = a.run(span, [1.8, 1.8]).values[0]
            offset = b.run(span, [1.8, 1.8]).values[0]
            assert spiked == (offset >= 0)


# ---------------------------------------------------------------------------
# Reset, modes, cloning
# ---------------------------------------------------------------------------

class TestState:
    def test_reset_restores_initial_condition(self):
        g = LIFSpikeGenerator(0.001, 0.02, 0.002, initial_voltage=0.3)
        constant_drive(g, 0.8)
        g.reset(False)
        assert g.voltage == 0.3
        assert len(g.get_history("V")) == 0

    def test_not_refractory_after_reset(self):
        """The refractory clock starts at tau_ref, so the first sub-step integrates."""
        g = LIFSpikeGenerator(0.001, 0.02, 0.01)
        g.reset(True)
        g.run([0.0, 0.001], [2.0, 2.0])
        assert g.voltage > 0.0

    def test_unknown_state_raises(self, generator):
        with pytest.raises(SimulationError):
            generator.get_history("W")
        assert "V" in generator.list_states()

    def test_max_time_step_reported_without_slack(self, generator):
        assert generator.max_time_step == pytest.approx(0.001)

    def test_all_modes_supported(self, generator):
        for mode in SimulationMode:
            generator.set_mode(mode)
            assert generator.mode == mode

    def test_clone_is_independent(self, generator):
        constant_drive(generator, 2.0)
        twin = generator.clone()
        np.testing.assert_array_equal(twin.get_history("V").values,
                                      generator.get_history("V").values)
        assert twin._voltage_history is not generator._voltage_history
        assert twin._supported_modes is not generator._supported_modes

        twin.run([0.02, 0.03], [0.0, 0.0])
        assert len(generator.get_history("V")) == 20
        assert len(twin.get_history("V")) == 10


class TestFactory:
    def test_defaults_follow_default_config(self):
        g = LIFSpikeGeneratorFactory().make()
        assert g.tau_rc == pytest.approx(DEFAULT_CONFIG.tau_rc)
        assert g.tau_ref == pytest.approx(DEFAULT_CONFIG.tau_ref)
        assert g.max_time_step == pytest.approx(DEFAULT_CONFIG.max_time_step)

    def test_defaults_from_given_config(self):
        config = SimulationConfig(max_time_step=0.0002, tau_rc=0.05, tau_ref=0.004,
                                  initial_voltage=0.1)
        g = LIFSpikeGeneratorFactory(config=config).make()
        assert g.tau_rc == pytest.approx(0.05)
        assert g.tau_ref == pytest.approx(0.004)
        assert g.max_time_step == pytest.approx(0.0002)
        assert g.voltage == pytest.approx(0.1)

    def test_generator_from_config(self):
        config = SimulationConfig(tau_rc=0.05, initial_voltage=0.2)
        g = LIFSpikeGenerator.from_config(config)
        assert g.tau_rc == 0.05
        assert g.voltage == 0.2
        assert LIFSpikeGenerator().tau_rc == DEFAULT_CONFIG.tau_rc

    def test_samples_from_pdfs(self):
        factory = LIFSpikeGeneratorFactory(tau_rc=IndicatorPDF(0.01, 0.03, seed=1),
                                           tau_ref=IndicatorPDF(0.001, 0.002, seed=2))
        taus = [factory.make().tau_rc for _ in range(20)]
        assert all(0.01 <= t <= 0.03 for t in taus)
        assert len(set(taus)) > 1
