"""Application wiring for the wardrobe planner."""
