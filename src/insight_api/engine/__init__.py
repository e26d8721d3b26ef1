"""Engine: owns the chain source, services and infrastructure."""
