version_number = "2.0"
