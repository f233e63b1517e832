"""Background jobs: Dramatiq broker, actors, scheduler and health checks."""
