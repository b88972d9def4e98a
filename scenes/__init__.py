"""scenes — pygame screens pushed onto the App scene stack."""
