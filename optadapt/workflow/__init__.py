"""optadapt.workflow: Temporal.io exercise-at-expiry workflow."""

from optadapt.workflow.types import CanExerciseInput as CanExerciseInput
from optadapt.workflow.types import ExerciseInput as ExerciseInput
from optadapt.workflow.types import ExerciseOutcome as ExerciseOutcome
from optadapt.workflow.types import ExerciseOutput as ExerciseOutput
from optadapt.workflow.types import ExerciseRequest as ExerciseRequest
from optadapt.workflow.types import ExerciseResult as ExerciseResult
