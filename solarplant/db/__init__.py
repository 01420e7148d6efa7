"""SQLite storage for prices, forecasts, measurements, snapshots and logs."""