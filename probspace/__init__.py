"""
probspace — typed core for finite measurable spaces, measures and derived
probabilistic objects (random variables, independence, filtrations,
stopping times).

All objects are immutable after construction and every invariant is checked
at construction time.
"""
