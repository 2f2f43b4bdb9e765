from .datastore import DataStore, SqlAlchemyDataStore
