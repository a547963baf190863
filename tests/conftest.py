import pytest

from models import SimulationParams


@pytest.fixture
def make_params():
    """Factory for a single deterministic trade unless overridden."""
    def _make(**overrides) -> SimulationParams:
        values = dict(
            starting_balance=1000.0,
            days=1,
            simulations=1,
            trades_per_day=1,
            win_rate=100.0,
            risk_per_trade_pct=10.0,
            leverage=1.0,
            win_r_min=2.0,
            win_r_max=2.0,
            loss_r_min=1.0,
            loss_r_max=1.0,
            fee_rate_per_side_pct=0.0,
            ruin_threshold_pct=20.0,
        )
        values.update(overrides)
        return SimulationParams(**values)
    return _make


@pytest.fixture
def seeded_params() -> SimulationParams:
    """A small but non-trivial seeded batch with fat tails and ruin."""
    return SimulationParams(
        starting_balance=5000.0,
        days=6,
        simulations=40,
        trades_per_day=4,
        win_rate=45.0,
        risk_per_trade_pct=3.0,
        leverage=5.0,
        win_r_min=1.0,
        win_r_max=2.5,
        loss_r_min=0.8,
        loss_r_max=1.5,
        fee_rate_per_side_pct=0.05,
        extremes_enabled=True,
        extreme_prob_pct=5.0,
        extreme_win_r=8.0,
        extreme_loss_r=4.0,
        ruin_threshold_pct=80.0,
        use_seed=True,
        seed_value=2024,
    )
