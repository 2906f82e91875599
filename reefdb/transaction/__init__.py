"""Transaction state tracking and savepoint handling."""