import pytest
from rlkit.params import LikelihoodParams, load_likelihood_params


def test_params_validation():
    p = LikelihoodParams.model_validate({})
    assert p.informative_threshold == 0.2
    assert p.log10_qual_per_base == -4.0
    assert p.max_errors_per_read == 2.0
    assert p.downsampling_seed is None

    p = LikelihoodParams.model_validate({"informative_threshold": 0.5, "downsampling_seed": 7})
    assert p.informative_threshold == 0.5
    assert p.downsampling_seed == 7

    with pytest.raises(ValueError):
        LikelihoodParams.model_validate({"log10_qual_per_base": 1.0})

    with pytest.raises(ValueError):
        LikelihoodParams.model_validate({"max_errors_per_read": 0})

    with pytest.raises(ValueError):
        LikelihoodParams.model_validate({"informative_threshold": -0.1})


def test_poorly_modeled_floor():
    p = LikelihoodParams()
    # min(2, ceil(10 * 0.01)) * -4
    assert p.poorly_modeled_floor(10, 0.01) == -4.0
    # min(2, ceil(150 * 0.01)) * -4
    assert p.poorly_modeled_floor(150, 0.01) == -8.0
    # capped at 2 errors
    assert p.poorly_modeled_floor(1000, 0.01) == -8.0
    assert p.poorly_modeled_floor(0, 0.01) == 0.0


def test_params_load(tmp_path):
    default = load_likelihood_params("default")
    assert default == LikelihoodParams()

    seeded = load_likelihood_params("seeded")
    assert seeded.downsampling_seed == 1234
    assert seeded.informative_threshold == 0.2

    pf = tmp_path / "params.json"
    pf.write_text('{"log10_qual_per_base": -3.0, "max_errors_per_read": 3}')

    from_path = load_likelihood_params(pf)
    assert from_path.log10_qual_per_base == -3.0
    assert from_path.max_errors_per_read == 3.0
    assert load_likelihood_params(str(pf)) == from_path
