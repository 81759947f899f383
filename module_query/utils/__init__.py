"""Helpers shared by the resolvers and the CLI."""
