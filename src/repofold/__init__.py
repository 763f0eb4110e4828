"""
repofold: fold personal GitHub, GitLab and local repositories into one monorepo.
"""
