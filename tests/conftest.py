import matplotlib
import pytest

matplotlib.use("Agg")

from singlecycle.Simulator import Simulator


@pytest.fixture
def sim():
    return Simulator()


@pytest.fixture
def run_program():
    """Load ``source`` into a fresh simulator and run it to completion."""
    def _run(source, max_steps=1000):
        sim = Simulator()
        result = sim.load(source)
        assert result.ok, result.error
        sim.run(delay=0, max_steps=max_steps)
        return sim
    return _run
