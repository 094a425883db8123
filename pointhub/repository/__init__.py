"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused, so services avoid SQL strings.
Every helper takes the connection handed out by Store.read()/Store.transaction().
"""
