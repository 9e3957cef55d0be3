from .annotations import EditorAnnotationState, InlineAnnotation
from .compiler_runner import CompileRequest, CompileResult, run_compile
from .detector import TriggerMatch, detect_trigger
from .run_controller import InlineRunController
from .settings_schema import NormalizedQuickCConfig

__all__ = [
    "CompileRequest",
    "CompileResult",
    "EditorAnnotationState",
    "InlineAnnotation",
    "InlineRunController",
    "NormalizedQuickCConfig",
    "TriggerMatch",
    "detect_trigger",
    "run_compile",
]
