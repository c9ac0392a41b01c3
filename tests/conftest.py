import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from sirdsim.parameters import CoupledParameters, MixingParameterSet, ParameterSet
from sirdsim.sampling import RateSampler


@pytest.fixture
def params() -> ParameterSet:
    """Small population with every transition active."""
    return ParameterSet(
        infection_rate=0.3,
        recovery_rate=0.1,
        immunity_loss_rate=0.01,
        death_fraction=0.05,
        total_population=1000,
        initial_infected=10,
    )


@pytest.fixture
def deterministic() -> RateSampler:
    return RateSampler(stochastic=False)


@pytest.fixture
def coupled(params) -> CoupledParameters:
    second = ParameterSet(
        infection_rate=0.2,
        recovery_rate=0.05,
        immunity_loss_rate=0.02,
        death_fraction=0.01,
        total_population=400,
        initial_infected=0,
    )
    return CoupledParameters(params, second, MixingParameterSet(0.05, 0.1))


class RecordingSampler(RateSampler):
    """Deterministic sampler that remembers every expected count it was asked for."""

    def __init__(self):
        super().__init__(stochastic=False)
        self.requests = []

    def sample(self, expected):
        self.requests.append(float(expected))
        return super().sample(expected)


@pytest.fixture
def recording() -> RecordingSampler:
    return RecordingSampler()
