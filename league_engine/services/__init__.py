"""
Services Layer

Pure competition logic that:
- Accepts teams, matches, standings and configs as plain records
- Returns new records (matches, standings, bracket nodes)
- Does NOT read the environment or touch storage
- Does NOT mutate its inputs
"""
