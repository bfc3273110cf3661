"""BuildPlan estimation workspace.

This package contains the plan editing core for the BuildPlan construction
estimator together with the service clients that feed it.

Architecture:
- Services: plan generation, suggestions and ticket triage (LLM backed)
- Engine: allocation, cost recalculation, editors, mutation and history
- Workspace: the Absent/Active plan lifecycle exposed to the UI layer
"""

__version__ = "1.0.0"
