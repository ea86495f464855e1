"""Feature packages: integrations, delivery, jobs."""
