SCHEMA_SQL = r"""
-- Product SKUs (codes are stored uppercase; uniqueness is case-insensitive)
CREATE TABLE IF NOT EXISTS skus (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  code TEXT NOT NULL UNIQUE COLLATE NOCASE,
  name TEXT NOT NULL,
  description TEXT,
  created_at TEXT NOT NULL,              -- ISO datetime (UTC)
  created_by TEXT
);

-- Production batches (one production run of a SKU)
CREATE TABLE IF NOT EXISTS batches (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  sku_id INTEGER NOT NULL,
  batch_number TEXT NOT NULL,            -- "001", "002", ... per SKU per day
  pieces INTEGER NOT NULL CHECK (pieces > 0),
  production_date TEXT NOT NULL,         -- ISO date, local calendar day
  created_at TEXT NOT NULL,              -- ISO datetime (UTC)
  created_by TEXT,

  UNIQUE (sku_id, production_date, batch_number),
  FOREIGN KEY (sku_id) REFERENCES skus(id)
);

CREATE INDEX IF NOT EXISTS idx_batches_sku_day ON batches(sku_id, production_date);
CREATE INDEX IF NOT EXISTS idx_batches_created ON batches(created_at);
"""
