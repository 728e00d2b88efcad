"""Graph nodes for the agent loop."""
