"""Domain model for templates, projects and scaffolding errors."""
