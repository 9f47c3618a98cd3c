"""wodlog - workout-of-the-day calendar with AI import."""
