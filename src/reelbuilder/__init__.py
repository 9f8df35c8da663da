"""reelbuilder -- assemble short-form videos from Hook, Body and CTA clips.

Clips are ingested into per-category libraries, dragged into an ordered
timeline, and merged into a single video once the timeline holds at least
one clip of each category.
"""
