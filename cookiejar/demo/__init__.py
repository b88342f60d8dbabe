"""A small application that stores and reads back a session value."""
