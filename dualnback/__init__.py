"""dualnback package

Core modules for the PsychoPy adaptive dual N-back task.
Stimulus generation, scoring, trial timing, difficulty adaptation and session
control live here and run headless; the PsychoPy runner is `nback_task.py` at
the repository root.
"""

__all__ = [
	"__version__",
]

__version__ = "2.0.0"
