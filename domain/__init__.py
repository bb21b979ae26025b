"""Describes the chefbot domain. Centres around the recipe pipeline.

What is in here?

- A model client. Text in, text out, served behind somebody else's api.
- The pipeline. One or two calls to that client, nothing clever.
- Auth. Phone number in, token out.
- The store. Users and the recipes they asked for.

Everything external is passed in, so the tests can fake it.
"""
