"""Core library of the SGI records service: config, auth, access control and stores."""
