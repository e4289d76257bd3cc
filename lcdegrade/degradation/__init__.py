from .annotation import (annotate_series, add_noise, draw_standard_errors,
                         flag_visibility, flag_non_detections, cadence_step,
                         annotation_defaults, CadenceError)
from .pipeline import (synthesise_lightcurve, synthesise_lightcurves,
                       series_generators, select_stage, stage_column,
                       SERIES_PRESETS, STAGES)
