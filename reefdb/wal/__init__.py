"""Write-ahead log entries and the log file that holds them."""