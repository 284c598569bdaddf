"""
Data model of the layout engine: sections, arrangements, beam solutions,
geometry helpers and diagnostic sinks.
"""
