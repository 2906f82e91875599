"""Table storage: the shared interface, snapshots, and in-memory, on-disk and memory-mapped backends."""