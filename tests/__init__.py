"""
Test suite: unit/ (pure logic), contract/ (API client, credentials, files),
integration/ (scheduler and worker end to end).
"""
