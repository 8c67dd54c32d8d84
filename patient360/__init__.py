"""Project configuration package for the Patient 360 administration backend."""
