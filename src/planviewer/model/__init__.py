"""
The MODEL layer contains pure data structures and geometry.
It has NO knowledge of the GUI (Qt).
It deals with the plan document, scale mappings, the viewport and hit testing.
"""
