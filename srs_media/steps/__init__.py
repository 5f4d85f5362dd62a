from .step_10_self_update import SelfUpdateCheckStep
from .step_20_preconditions import PreconditionsStep
from .step_30_acquire_kit import AcquireKitStep
from .step_40_resolve_menu import ResolveMenuStep
from .step_50_prepare_sources import PrepareSourcesStep
from .step_60_format_media import FormatMediaStep
from .step_70_copy_media import CopyMediaStep
from .step_75_answer_file import AnswerFileStep
from .step_80_update_image import UpdateImageStep
from .step_90_cleanup import CleanupStep

__all__ = [
    "SelfUpdateCheckStep",
    "PreconditionsStep",
    "AcquireKitStep",
    "ResolveMenuStep",
    "PrepareSourcesStep",
    "FormatMediaStep",
    "CopyMediaStep",
    "AnswerFileStep",
    "UpdateImageStep",
    "CleanupStep",
]
