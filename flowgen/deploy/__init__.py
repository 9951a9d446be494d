"""Project assembly and the deployment pipeline."""
