import math
from pathlib import Path
from pydantic import BaseModel, Field

from . import constants as cc

__all__ = [
    "BUNDLED_PARAMS_CONFIGS",
    "LikelihoodParams",
    "load_likelihood_params",
]

PARAMS_CONFIG_BASE_PATH = Path(__file__).parent / "data" / "params"

BUNDLED_PARAMS_CONFIGS: dict[str, Path] = {
    "default": PARAMS_CONFIG_BASE_PATH / "default.json",
    "seeded": PARAMS_CONFIG_BASE_PATH / "seeded.json",
}


class LikelihoodParams(BaseModel):
    informative_threshold: float = Field(default=cc.INFORMATIVE_THRESHOLD, ge=0.0, allow_inf_nan=False)
    log10_qual_per_base: float = Field(default=cc.LOG10_QUAL_PER_BASE, lt=0.0, allow_inf_nan=False)
    max_errors_per_read: float = Field(default=cc.MAX_ERRORS_PER_READ, gt=0.0, allow_inf_nan=False)
    downsampling_seed: int | None = None

    def poorly_modeled_floor(self, read_length: int, maximum_error_per_base: float) -> float:
        # Likelihood a read must reach under at least one allele to not count as poorly modeled
        max_errors = min(self.max_errors_per_read, math.ceil(read_length * maximum_error_per_base))
        return max_errors * self.log10_qual_per_base


def load_likelihood_params(id_or_path: Path | str) -> LikelihoodParams:
    """
    Load likelihood engine parameters from a specified location - either a string ID of a bundled configuration or a
    path to a JSON file. Keys missing from the file take their default values.
    :param id_or_path: String ID of a bundled configuration, or a string/Path object pointing to a JSON file.
    :return: Validated, typed version of the loaded parameters.
    """

    params_path: Path
    if isinstance(id_or_path, str):
        if id_or_path in BUNDLED_PARAMS_CONFIGS:
            params_path = BUNDLED_PARAMS_CONFIGS[id_or_path]
        else:
            params_path = Path(id_or_path)
    else:
        params_path = id_or_path

    with open(params_path, "r") as fh:
        return LikelihoodParams.model_validate_json(fh.read())
