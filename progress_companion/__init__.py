"""Progress Companion: fitness tracking backend with an analytics and confidence-scoring engine."""
