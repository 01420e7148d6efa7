"""Jobs that fetch energy prices, forecast energy and record hourly measurements."""