"""Training pipeline: YAML configs, metrics and train/evaluate scripts."""
