"""maintain: compose and run ordered maintenance scenarios."""
