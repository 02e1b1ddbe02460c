"""Checkers for git state, commit freshness, branch protection and CI configuration."""