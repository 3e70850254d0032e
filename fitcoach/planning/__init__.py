"""Plan generation: prompt building, constrained generation, re-validation."""
