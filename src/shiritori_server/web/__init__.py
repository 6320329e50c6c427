"""Server-side rendering of the word list."""
