"""Pipeline services: build matrix driver, artifact stager, resolver."""
