"""Audio stream readers: transform chaining, broadcasting and change detection."""