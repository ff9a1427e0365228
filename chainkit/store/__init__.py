"""Key/value and log stores: in memory, LMDB and SQL backends."""