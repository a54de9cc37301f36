"""Sample realms and Secrets shared by the tests."""
