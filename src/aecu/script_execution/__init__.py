"""Script execution exports."""

from .execution_outcomes import ExecutionResult
from .fallback_resolution import fallback_script_name, get_fallback_script
from .script_executor import ScriptExecutor
from .script_interpreter import InterpreterOutcome, ScriptInterpreter, SubprocessScriptInterpreter

__all__ = [
    "ExecutionResult",
    "InterpreterOutcome",
    "ScriptExecutor",
    "ScriptInterpreter",
    "SubprocessScriptInterpreter",
    "fallback_script_name",
    "get_fallback_script",
]
