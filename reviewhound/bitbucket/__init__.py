"""Bitbucket Code Insights reports and annotations for Cloud and Server."""