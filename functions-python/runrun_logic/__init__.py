"""Server-side logic for the RunRun app, independent of the Functions runtime."""
