import pytest

from qnopt.optimize import MAX_NUM_VARIABLES, BFGSConfig


def test_defaults():
    config = BFGSConfig()
    assert config.tolerance == 1e-6
    assert config.max_steps == 1000
    assert config.max_num_kick_starts == 3
    assert config.c1 == 1e-4
    assert config.c2 == 0.9
    assert config.max_num_evaluations_wolfe_search == 10
    assert config.extend_alpha_factor == 3.0
    assert config.num_steps_steepest_descent == 50
    assert config.max_num_variables == MAX_NUM_VARIABLES == 3000


def test_allowed_max_h_scales_with_problem_size():
    config = BFGSConfig(allowed_max_h_factor=100.0)
    assert config.allowed_max_h(3) == pytest.approx(300.0**2)


def test_steepest_descent_steps_clamped():
    assert BFGSConfig(num_steps_steepest_descent=0).num_steps_steepest_descent == 1
    assert BFGSConfig(num_steps_steepest_descent=-5).num_steps_steepest_descent == 1


@pytest.mark.parametrize(
    "options",
    [
        {"tolerance": 0.0},
        {"max_steps": -1},
        {"max_num_kick_starts": -1},
        {"c1": 0.5, "c2": 0.4},
        {"c2": 1.0},
        {"extend_alpha_factor": 1.0},
        {"max_num_evaluations_wolfe_search": 0},
        {"step_size_reduction": 1.5},
        {"max_num_variables": 0},
    ],
)
def test_invalid_values_rejected(options):
    with pytest.raises(ValueError):
        BFGSConfig(**options)


def test_from_dict_accepts_file_option_names():
    config = BFGSConfig.from_dict(
        {"maxSteps": 20, "maxNumKickStarts": 5, "tolerance": 1e-4, "c2": 0.5}
    )
    assert config.max_steps == 20
    assert config.max_num_kick_starts == 5
    assert config.tolerance == 1e-4
    assert config.c2 == 0.5


def test_from_dict_accepts_field_names():
    config = BFGSConfig.from_dict({"num_steps_steepest_descent": 7})
    assert config.num_steps_steepest_descent == 7


def test_from_dict_unknown_key():
    with pytest.raises(ValueError, match="Unknown BFGS option"):
        BFGSConfig.from_dict({"learningRate": 0.1})


def test_config_is_frozen():
    config = BFGSConfig()
    with pytest.raises(AttributeError):
        config.max_steps = 5
