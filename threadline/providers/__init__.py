"""Remote providers used by Threadline."""
