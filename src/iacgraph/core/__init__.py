"""Core value types: nodes, edges, graphs, evidence and exceptions."""
