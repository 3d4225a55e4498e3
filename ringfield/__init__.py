"""Ringfield procedural distribution engine.

The package decides, for any world position and seed, which ring and
quadrant region the position belongs to, how rocks and geological
formations populate that region, and where discovery zones and the
corridors between them are carved out of the distribution. Subsystems
live under ``ringfield.src``; tunables ship as JSON under ``config``.
"""
