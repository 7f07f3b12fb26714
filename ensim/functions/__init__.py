"""functions — Functions, distributions and noise models.

Building blocks consumed by the model layer: functions of time for
stimuli, PDFs for sampling heterogeneous parameters, and noise models
for origins.
"""

from .functions import (
    Function,
    ConstantFunction,
    LambdaFunction,
    SineFunction,
)
from .pdf import (
    PDF,
    IndicatorPDF,
    GaussianPDF,
)
from .noise import (
    Noise,
    GaussianNoise,
)
