"""Initial schema: accounts, applications, apis, plugins, metrics."""


def up(options):
    return """
      CREATE TABLE IF NOT EXISTS accounts(
        id TEXT PRIMARY KEY,
        provider_id TEXT,
        created_at TEXT
      );

      CREATE INDEX IF NOT EXISTS accounts_provider_id ON accounts(provider_id);

      CREATE TABLE IF NOT EXISTS applications(
        id TEXT PRIMARY KEY,
        account_id TEXT,
        public_key TEXT,
        secret_key TEXT,
        created_at TEXT
      );

      CREATE INDEX IF NOT EXISTS applications_account_id ON applications(account_id);
      CREATE INDEX IF NOT EXISTS applications_public_key ON applications(public_key);

      CREATE TABLE IF NOT EXISTS apis(
        id TEXT PRIMARY KEY,
        name TEXT,
        public_dns TEXT,
        target_url TEXT,
        created_at TEXT
      );

      CREATE INDEX IF NOT EXISTS apis_name ON apis(name);
      CREATE INDEX IF NOT EXISTS apis_public_dns ON apis(public_dns);

      CREATE TABLE IF NOT EXISTS plugins(
        id TEXT,
        api_id TEXT,
        application_id TEXT,
        name TEXT,
        value TEXT,
        enabled INTEGER,
        created_at TEXT,
        PRIMARY KEY (id, name)
      );

      CREATE INDEX IF NOT EXISTS plugins_name ON plugins(name);
      CREATE INDEX IF NOT EXISTS plugins_api_id ON plugins(api_id);
      CREATE INDEX IF NOT EXISTS plugins_application_id ON plugins(application_id);

      CREATE TABLE IF NOT EXISTS metrics(
        api_id TEXT,
        identifier TEXT,
        period TEXT,
        period_date TEXT,
        value INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (api_id, identifier, period_date, period)
      );
    """


def down(options):
    return """
      DROP TABLE IF EXISTS metrics;
      DROP TABLE IF EXISTS plugins;
      DROP TABLE IF EXISTS apis;
      DROP TABLE IF EXISTS applications;
      DROP TABLE IF EXISTS accounts;
    """
