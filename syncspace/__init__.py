"""Mirror a local directory to a cloud VM while working in a shell on it."""
