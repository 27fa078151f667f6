import os

from hypothesis import settings

# Parser property tests build sizeable inputs; wall-clock deadlines only add flakiness.
settings.register_profile("ci", max_examples=300, deadline=None)
settings.register_profile("dev", max_examples=100, deadline=None)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))
