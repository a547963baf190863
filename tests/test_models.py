"""Tests for parameter validation and clamping."""
import pytest
from pydantic import ValidationError

from models import SimulationParams, clamp_params


class TestSimulationParams:

    def test_defaults(self):
        params = SimulationParams()
        assert params.starting_balance == 1000.0
        assert params.simulations == 1000
        assert params.total_trades_per_sim == 90
        assert params.ruin_threshold == pytest.approx(200.0)
        assert params.use_seed is False

    def test_frozen(self):
        params = SimulationParams()
        with pytest.raises(ValidationError):
            params.days = 5

    @pytest.mark.parametrize(
        "field,value",
        [
            ("starting_balance", 0),
            ("days", 0),
            ("simulations", 0),
            ("simulations", 100_001),
            ("trades_per_day", 0),
            ("win_rate", 100.5),
            ("win_rate", -1),
            ("risk_per_trade_pct", 0),
            ("leverage", 0.5),
            ("fee_rate_per_side_pct", -0.1),
            ("ruin_threshold_pct", 101),
            ("starting_balance", float("inf")),
        ],
    )
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            SimulationParams(**{field: value})

    def test_inverted_r_range_rejected(self):
        with pytest.raises(ValidationError):
            SimulationParams(win_r_min=3.0, win_r_max=1.0)
        with pytest.raises(ValidationError):
            SimulationParams(loss_r_min=2.0, loss_r_max=1.0)

    def test_seed_value_keeps_type(self):
        assert SimulationParams(seed_value="abc").seed_value == "abc"
        assert SimulationParams(seed_value=7).seed_value == 7


class TestClampParams:

    def test_clamps_out_of_range_values(self):
        params = clamp_params(
            {
                "days": 1000,
                "simulations": 500_000,
                "trades_per_day": -4,
                "win_rate": 150,
                "risk_per_trade_pct": 0,
                "leverage": 0.2,
                "fee_rate_per_side_pct": -1,
                "ruin_threshold_pct": -5,
                "extreme_prob_pct": 200,
            }
        )
        assert params.days == 365
        assert params.simulations == 100_000
        assert params.trades_per_day == 1
        assert params.win_rate == 100
        assert params.risk_per_trade_pct == 0.01
        assert params.leverage == 1.0
        assert params.fee_rate_per_side_pct == 0.0
        assert params.ruin_threshold_pct == 0
        assert params.extreme_prob_pct == 100

    def test_unparsable_values_fall_back(self):
        params = clamp_params({"starting_balance": "lots", "days": None, "win_rate": float("nan")})
        assert params.starting_balance == 1.0
        assert params.days == 1
        assert params.win_rate == 0.0

    def test_fractional_counts_are_floored(self):
        assert clamp_params({"days": "12.9"}).days == 12

    def test_inverted_ranges_are_swapped(self):
        params = clamp_params({"win_r_min": 3, "win_r_max": 1, "loss_r_min": 2, "loss_r_max": 0.5})
        assert (params.win_r_min, params.win_r_max) == (1.0, 3.0)
        assert (params.loss_r_min, params.loss_r_max) == (0.5, 2.0)

    def test_missing_keys_use_defaults(self):
        assert clamp_params({}) == SimulationParams()

    def test_seed_handling(self):
        assert clamp_params({"use_seed": False, "seed_value": "x"}).seed_value == 12345
        assert clamp_params({"use_seed": True, "seed_value": ""}).seed_value == "12345"
        assert clamp_params({"use_seed": True, "seed_value": 99}).seed_value == 99
        assert clamp_params({"use_seed": True, "seed_value": "abc"}).seed_value == "abc"
