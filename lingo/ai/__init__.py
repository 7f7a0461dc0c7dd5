"""
AI Features.

- client: text, structured and grounded generation
- translator: compliance glossary lookups
- writing: grammar fix / simplify / expand for notes
- quiz: multiple-choice questions from the user's notes
- news: grounded compliance news briefing
"""
