"""Business logic: note sync engine, auth session, speech."""
